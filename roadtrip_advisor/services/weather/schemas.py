from typing import Optional

from pydantic import BaseModel, Field

from roadtrip_advisor.core.schemas import WeatherSnapshot, WeatherSource


class WeatherReport(BaseModel):
    """Current conditions for a city, as served by ``GET /weather/{city}``."""

    type: str = "weather"
    city: str = Field(description="City name as resolved by the provider")
    observed_at: str = Field(description="ISO-8601 observation time")
    temperature: float = Field(description="Temperature in °C")
    condition: str = Field(description="Localised weather description")
    humidity: Optional[float] = Field(default=None, description="Relative humidity in %")
    wind_speed_kmh: Optional[float] = Field(default=None, description="Wind speed in km/h")
    precipitation_mm: float = Field(default=0.0, description="Rain over the last hour in mm")
    source: WeatherSource = "live"
    note: Optional[str] = None

    def to_snapshot(self, place: Optional[str] = None) -> WeatherSnapshot:
        return WeatherSnapshot(
            place=place or self.city,
            condition=self.condition,
            temperature=self.temperature,
            precipitation_mm=self.precipitation_mm,
            wind_speed_kmh=self.wind_speed_kmh,
            source=self.source,
        )
