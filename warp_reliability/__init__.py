"""Reliability analysis for flows scheduled on a shared wireless TDMA medium."""
