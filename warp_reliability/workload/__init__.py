from warp_reliability.workload.node import Node
from warp_reliability.workload.flow import Flow
from warp_reliability.workload.view import FlowRecord, WorkloadView
from warp_reliability.workload.workload import WorkLoad, WorkloadWarning

__all__ = [
    "Node",
    "Flow",
    "FlowRecord",
    "WorkloadView",
    "WorkLoad",
    "WorkloadWarning",
]
