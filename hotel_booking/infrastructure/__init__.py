"""Capa de infraestructura: transporte HTTP, circuit breaker y adaptadores in-memory."""
