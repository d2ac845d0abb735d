"""
Exception types for the register simulator.

None of these escape the machine's public operations: instruction handlers
raise OperandError, the run loop catches it and records a diagnostic.
ConfigError is raised while loading profiles/config files, before any
machine exists.
"""

__all__ = ['SimulatorError', 'OperandError', 'ConfigError']


class SimulatorError(Exception):
    """Base class for simulator errors."""
    def __init__(self, message: str, line_num: int = 0, line_text: str = ""):
        self.line_num = line_num
        self.line_text = line_text
        super().__init__(f"Line {line_num}: {message}" if line_num else message)


class OperandError(SimulatorError):
    """Wrong operand count, unknown register or unparseable value."""
    pass


class ConfigError(SimulatorError):
    """Unknown profile or malformed configuration file."""
    pass
