from warp_reliability.schedule.instruction import Instruction, Other, Pull, Push, decode_instructions
from warp_reliability.schedule.program import ProgramSchedule

__all__ = [
    "Instruction",
    "Push",
    "Pull",
    "Other",
    "decode_instructions",
    "ProgramSchedule",
]
