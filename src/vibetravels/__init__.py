"""VibeTravels - AI-generated travel itineraries over OpenRouter."""

__version__ = "0.1.0"
