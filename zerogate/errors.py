"""
ZeroGate -- Error Hierarchy

All exceptions raised within the quality gate.

Test-level failures are data, never control flow:
  ValidatorError      -- absorbed by the executor into a failing TestResult
  pre-validation gaps -- a synthesized failing CertificationReport
  criteria violations -- boolean/numeric report fields

Only WorkflowError escapes to callers of the certification engine.
"""

from __future__ import annotations


class ZeroGateError(RuntimeError):
    """Base for all ZeroGate errors."""


class ValidatorError(ZeroGateError):
    """
    A validator timed out or broke its contract.

    Never propagated: the pipeline converts it into a failing TestResult
    carrying this message.
    """


class RegistryError(ZeroGateError):
    """Base for verification registry errors."""


class RegistrySealedError(RegistryError):
    """Registration was attempted after the registry left its initialization phase."""


class WorkflowError(ZeroGateError):
    """
    A defect in the certification orchestration itself.

    Raised from the original exception after the failure is logged and
    recorded in the audit trail.
    """
