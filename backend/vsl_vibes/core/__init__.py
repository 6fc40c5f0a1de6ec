"""
Core Module - Cross-cutting concerns and shared infrastructure

This module contains foundational utilities used across the entire application.
These are not business logic, but rather infrastructure and common patterns.

Organization:
    - logging.py: Structured logging configuration and utilities
    - exceptions.py: Error taxonomy shared by pipeline, routes and exporter
    - security.py: Identifier validation and safe file names
    - runtime.py: Startup checks and environment parsing

Usage:
    from vsl_vibes.core import get_logger, validate_project_id
"""

# Logging
from .logging import (
    setup_logging,
    get_logger,
    set_request_id,
    set_project_id,
    set_stage,
    clear_context,
    LogTimer,
)

# Exceptions
from .exceptions import (
    VslVibesError,
    PipelineError,
    InfrastructureError,
    ProviderError,
    CredentialError,
    BillingError,
    RateLimitError,
    UpstreamError,
    TransportError,
    MalformedResponseError,
    EmptyScriptError,
    InvalidTransitionError,
    GenerationCancelled,
    ProjectNotFoundError,
    SlideNotFoundError,
    ReviewIncompleteError,
    ExportError,
    error_for_status,
    is_billing_error,
)

# Security
from .security import (
    validate_project_id,
    sanitize_filename,
    is_public_address,
    is_public_https_url,
    resolve_host,
)

# Runtime guards
from .runtime import (
    LOCAL_VIDEO_TOOLS,
    PROVIDER_CREDENTIALS,
    parse_bool_env,
    missing_runtime_tools,
    credential_report,
    directory_is_writable,
    assert_directory_writable,
    run_startup_runtime_checks,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "set_request_id",
    "set_project_id",
    "set_stage",
    "clear_context",
    "LogTimer",
    # Exceptions
    "VslVibesError",
    "PipelineError",
    "InfrastructureError",
    "ProviderError",
    "CredentialError",
    "BillingError",
    "RateLimitError",
    "UpstreamError",
    "TransportError",
    "MalformedResponseError",
    "EmptyScriptError",
    "InvalidTransitionError",
    "GenerationCancelled",
    "ProjectNotFoundError",
    "SlideNotFoundError",
    "ReviewIncompleteError",
    "ExportError",
    "error_for_status",
    "is_billing_error",
    # Security
    "validate_project_id",
    "sanitize_filename",
    "is_public_address",
    "is_public_https_url",
    "resolve_host",
    # Runtime guards
    "LOCAL_VIDEO_TOOLS",
    "PROVIDER_CREDENTIALS",
    "parse_bool_env",
    "missing_runtime_tools",
    "credential_report",
    "directory_is_writable",
    "assert_directory_writable",
    "run_startup_runtime_checks",
]
