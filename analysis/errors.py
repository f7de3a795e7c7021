class EvaluationError(Exception):
    """A failure scoped to one VM; the batch carries on without it."""

    def __init__(self, vm_name: str, message: str):
        super().__init__(f"{vm_name}: {message}")
        self.vm_name = vm_name
        self.reason = message


class ResolutionError(EvaluationError):
    """The VM's host or cluster cannot be located in the inventory"""
    pass


class CalculationError(EvaluationError):
    """Host parameters are zero or invalid, so sockets cannot be optimized"""
    pass
