"""Electricity bill estimation from half-hourly smart-meter readings."""
