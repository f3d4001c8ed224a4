"""Approval-and-sync workflow engine.

Intercepts catalog writes, opens approval tasks for meaningful diffs,
applies human decisions and pushes approved state to Medusa.
"""
