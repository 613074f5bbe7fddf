"""Support/resistance level models."""

from pydantic import BaseModel, Field


class FibonacciLevels(BaseModel):
    """Fibonacci retracements of the 24h range and extensions above price."""

    level236: float = 0.0
    level382: float = 0.0
    level500: float = 0.0
    level618: float = 0.0
    level786: float = 0.0
    extension1272: float = 0.0
    extension1618: float = 0.0
    extension2000: float = 0.0
    extension2618: float = 0.0

    model_config = {"frozen": True}


class DynamicLevel(BaseModel):
    """A historical extremum ranked by how often price revisited it."""

    price: float = Field(..., ge=0)
    touches: int = Field(..., ge=0, description="Candles with a high/low inside the band")

    model_config = {"frozen": True}


class LevelSet(BaseModel):
    """Support, resistance and Fibonacci levels for one asset."""

    pivot: float = 0.0
    support1: float = 0.0
    support2: float = 0.0
    support3: float = 0.0
    resistance1: float = 0.0
    resistance2: float = 0.0
    resistance3: float = 0.0
    fibonacci: FibonacciLevels = Field(default_factory=FibonacciLevels)
    dynamic_supports: tuple[DynamicLevel, ...] = ()
    dynamic_resistances: tuple[DynamicLevel, ...] = ()

    model_config = {"frozen": True}

    @property
    def supports(self) -> tuple[float, float, float]:
        return (self.support1, self.support2, self.support3)

    @property
    def resistances(self) -> tuple[float, float, float]:
        return (self.resistance1, self.resistance2, self.resistance3)
