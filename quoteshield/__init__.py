"""
QuoteShield Scoring Engine

Deterministic risk scoring for contractor quotes:
1. Normalizes the AI-extracted quote report
2. Scores payment, timeline, scope, warranty and pricing
3. Aggregates a weighted final score and risk level
4. Derives risk findings and negotiation suggestions
"""

__version__ = "0.1.0"
