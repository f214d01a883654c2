# planet_generator/errors.py

"""Exception types raised by the planet generator."""


class PlanetGeneratorError(Exception):
    """Base class for all generator failures."""


class ConfigurationError(PlanetGeneratorError):
    """A configuration value is missing, malformed or out of range."""


class TopologyError(PlanetGeneratorError):
    """A cube-face remap produced a coordinate that has no valid cell."""

    def __init__(self, face, x, y, width, detail=""):
        self.face = face
        self.x = x
        self.y = y
        self.width = width
        message = f"no valid cell for face={face} x={x} y={y} width={width}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
