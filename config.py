import os
import logging
import sys
from typing import Optional, List


# =============================================================================
# Logging Configuration
# =============================================================================
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT: str = os.getenv(
    "LOG_FORMAT",
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


def setup_logging():
    """Configure application-wide logging"""
    level = getattr(logging, LOG_LEVEL, logging.INFO)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    # Reduce noise from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("pyVmomi").setLevel(logging.WARNING)


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.lower() in ("1", "true", "yes", "on")


# =============================================================================
# NUMA Advisory Thresholds
# =============================================================================
# Hardware version ordinal at which the guest is shown a virtual NUMA topology
NUMA_MIN_HW_VERSION: int = int(os.getenv("NUMA_MIN_HW_VERSION", "8"))
# Platform default for numa.vcpu.min: fewer vCPUs than this hides NUMA from the guest
NUMA_VCPU_MIN: int = int(os.getenv("NUMA_VCPU_MIN", "9"))
# Power policy advice only applies above this vCPU count
POWER_POLICY_VCPU_THRESHOLD: int = int(os.getenv("POWER_POLICY_VCPU_THRESHOLD", "8"))

# Batch evaluation pool size; 1 evaluates VMs sequentially
MAX_WORKERS: int = int(os.getenv("MAX_WORKERS", "1"))

# =============================================================================
# Live Inventory (vCenter) Configuration
# =============================================================================
VCENTER_HOST: str = os.getenv("VCENTER_HOST", "")
VCENTER_USER: str = os.getenv("VCENTER_USER", "")
VCENTER_PASSWORD: Optional[str] = os.getenv("VCENTER_PASSWORD")
VCENTER_PORT: int = int(os.getenv("VCENTER_PORT", "443"))
VCENTER_VERIFY_TLS: bool = _env_bool("VCENTER_VERIFY_TLS", True)

# =============================================================================
# Output Configuration
# =============================================================================
OUTPUT_DIR: str = os.getenv("OUTPUT_DIR", "output")
OUTPUT_FORMAT: str = os.getenv("OUTPUT_FORMAT", "json")  # "json" or "csv"
OUTPUT_PROJECTION: str = os.getenv("OUTPUT_PROJECTION", "compact")  # "compact" or "full"

OUTPUT_FORMATS = ("json", "csv")
OUTPUT_PROJECTIONS = ("compact", "full")


def get_output_path(vcenter: str, fmt: str = None) -> str:
    """Get per-vCenter output path: {vcenter}_numa_recommendations.{fmt}"""
    fmt = fmt or OUTPUT_FORMAT
    return os.path.join(OUTPUT_DIR, f"{vcenter}_numa_recommendations.{fmt}")


__all__ = [
    "NUMA_MIN_HW_VERSION",
    "NUMA_VCPU_MIN",
    "POWER_POLICY_VCPU_THRESHOLD",
    "MAX_WORKERS",
    "VCENTER_HOST",
    "VCENTER_USER",
    "VCENTER_PASSWORD",
    "VCENTER_PORT",
    "VCENTER_VERIFY_TLS",
    "OUTPUT_DIR",
    "OUTPUT_FORMAT",
    "OUTPUT_PROJECTION",
    "OUTPUT_FORMATS",
    "OUTPUT_PROJECTIONS",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "setup_logging",
    "validate_config",
    "get_output_path",
]


# =============================================================================
# Configuration Validation
# =============================================================================
class ConfigValidationError(Exception):
    """Raised when configuration validation fails"""
    pass


def _validate_positive_int(name: str, value: int) -> None:
    if value <= 0:
        raise ConfigValidationError(f"{name} must be positive, got {value}")


def _validate_choice(name: str, value: str, choices) -> None:
    if value not in choices:
        raise ConfigValidationError(
            f"{name} must be one of {', '.join(repr(c) for c in choices)}, got '{value}'"
        )


def validate_config(require_vcenter: bool = False) -> None:
    """Validate all configuration values on startup

    Args:
        require_vcenter: also require live vCenter credentials

    Raises:
        ConfigValidationError: If any configuration value is invalid
    """
    errors: List[str] = []

    for name, value in (
        ("NUMA_MIN_HW_VERSION", NUMA_MIN_HW_VERSION),
        ("NUMA_VCPU_MIN", NUMA_VCPU_MIN),
        ("POWER_POLICY_VCPU_THRESHOLD", POWER_POLICY_VCPU_THRESHOLD),
        ("MAX_WORKERS", MAX_WORKERS),
        ("VCENTER_PORT", VCENTER_PORT),
    ):
        try:
            _validate_positive_int(name, value)
        except ConfigValidationError as e:
            errors.append(str(e))

    try:
        _validate_choice("OUTPUT_FORMAT", OUTPUT_FORMAT, OUTPUT_FORMATS)
    except ConfigValidationError as e:
        errors.append(str(e))

    try:
        _validate_choice("OUTPUT_PROJECTION", OUTPUT_PROJECTION, OUTPUT_PROJECTIONS)
    except ConfigValidationError as e:
        errors.append(str(e))

    if require_vcenter:
        if not VCENTER_USER:
            errors.append("VCENTER_USER is required for a live inventory run")
        if not VCENTER_PASSWORD:
            errors.append("VCENTER_PASSWORD is required for a live inventory run")

    if errors:
        raise ConfigValidationError(
            "Configuration validation failed:\n  - " + "\n  - ".join(errors)
        )
