"""Request models for the HTTP API"""

from pydantic import BaseModel, Field

from .services.records import RawFix


class FixIn(BaseModel):
    """Incoming location sample; coordinates must be finite and in range"""

    latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)
    accuracy: float = Field(..., ge=0, allow_inf_nan=False)
    timestamp: int = Field(..., description="Epoch milliseconds")
    altitude: float | None = Field(None, allow_inf_nan=False)
    heading: float | None = Field(None, allow_inf_nan=False)
    speed: float | None = Field(None, allow_inf_nan=False, description="Device speed in m/s")

    def to_fix(self) -> RawFix:
        return RawFix(
            lat=self.latitude,
            lon=self.longitude,
            accuracy=self.accuracy,
            timestamp=self.timestamp,
            altitude=self.altitude,
            heading=self.heading,
            speed=self.speed,
        )


class StartIn(BaseModel):
    scenario: str | None = None
    power_mode: str | None = Field(None, pattern="^(high|balanced|battery)$")


class GeofenceIn(BaseModel):
    latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)
    radius_m: float = Field(..., gt=0, allow_inf_nan=False)


class SimulateIn(BaseModel):
    latitude: float = Field(-29.1, ge=-90, le=90)
    longitude: float = Field(26.2, ge=-180, le=180)
    points: int = Field(50, ge=2, le=5000)
