"""
Advisory layer: crisis response plans.

    crisis_plan.py   plan schema, generated-answer parser, rule-based fallback
"""
