'''
Date: 2026 10 19

Summary:
Run-aborting conditions of the AMI propagator. Each one ends the run as a
whole; per-item problems are recorded in the update report instead and
never raised.
'''


class PropagationError(Exception):
    """Base class for fatal conditions of a propagation run."""

    # Designed no-op: the run ends without being reported as a failure
    is_noop = False


class MalformedEvent(PropagationError):
    pass


class UnsupportedEventType(PropagationError):
    """The changed parameter is not an AMI parameter."""

    is_noop = True


class ParameterLookupError(PropagationError):
    pass


class TopologyEnumerationError(PropagationError):
    """Listing CodeDeploy applications or deployment groups failed part way."""


class NoTargetsFound(PropagationError):
    pass


class ImageLookupError(PropagationError):
    pass
