"""Healthy-vitals synthesis engine.

This package contains the value-synthesis core (bands, random walk,
time-of-day policy, synthesizers, interpretation and scoring) and the
service that threads a history store through it. Framework code lives
in the top-level ``adapters`` package.
"""
