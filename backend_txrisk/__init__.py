"""
Backend TxRisk: transaction risk-scoring engine.

Turns a payment event plus a snapshot of the user's transaction history into
a bounded anomaly score, a discrete risk level and actionable
recommendations. Modular layout: feature extraction and analyzers
(analysis_engine), external collaborators (services), reporting and event
emission (alerts), and the assessment pipeline (analytics).
"""

__version__ = "0.1.0"
