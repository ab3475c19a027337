"""Weekly study planner: free-time slots, subject allocation and task pools."""

__version__ = "0.1.0"
