from .validators import ValidationResult, check_priorities, validate_goals, validate_profile

__all__ = ["ValidationResult", "check_priorities", "validate_goals", "validate_profile"]
