"""
Scoring package — signal bundle → resilience report.

Modules:
    thresholds       — declarative (breach, delta) ladders + rounding helpers
    components       — six component scorers
    recommendations  — rule-based action synthesizer
    aggregator       — weights, level classifier, ranker, report
    trend            — 30-day trend estimate
"""
