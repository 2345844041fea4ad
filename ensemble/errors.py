"""
Exceptions raised by the after-the-fact oracle.
"""


class OracleError(Exception):
    """Base class for oracle failures"""


class OracleConfigError(OracleError, ValueError):
    """Invalid construction parameters, raised before any table is allocated"""


class PredictorOutputError(OracleError, ValueError):
    """A predictor output or training target was not a finite number"""


class NotTrainedError(OracleError, RuntimeError):
    """Inference was requested before a successful fit"""


class OracleInputError(OracleError, ValueError):
    """An inference input does not match the oracle's input width"""
