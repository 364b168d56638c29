"""Orquestación del flujo de completado de reservas hoteleras B2B."""

__version__ = "1.0.0"
