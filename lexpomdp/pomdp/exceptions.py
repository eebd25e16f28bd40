"""
Exceptions raised by the lexicographic POMDP solver.

Model-shape errors mean a required model component is missing or is not
finite/factored. Configuration errors mean the solver was asked for
something it does not support.
"""


class LPOMDPError(ValueError):
    """Base class for all solver errors."""
    pass


class ModelShapeError(LPOMDPError):
    """A model component is absent or has the wrong shape."""
    pass


class StateError(ModelShapeError):
    """States are missing or not a finite set of unique labels."""
    pass


class ActionError(ModelShapeError):
    """Actions are missing or not a finite set of unique labels."""
    pass


class ObservationError(ModelShapeError):
    """Observations are missing or not a finite set of unique labels."""
    pass


class StateTransitionError(ModelShapeError):
    """State transitions are missing or malformed."""
    pass


class ObservationTransitionError(ModelShapeError):
    """Observation probabilities are missing or malformed."""
    pass


class RewardError(ModelShapeError):
    """Rewards are not factored into flat state-action rewards."""
    pass


class HorizonError(ModelShapeError):
    """The horizon object is missing."""
    pass


class ConfigurationError(LPOMDPError):
    """Solver configuration is invalid or unsupported."""
    pass


class SlackError(ConfigurationError):
    """Slack vector has the wrong length or a negative entry."""
    pass


class UnsupportedHorizonError(ConfigurationError):
    """A finite horizon was requested; only infinite horizons are solved."""
    pass


class ExpansionRuleError(ConfigurationError):
    """The belief expansion rule is not recognized."""
    pass
