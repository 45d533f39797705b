"""
Hazards package — per-hazard disaster risk assessment.

Modules:
    models     — DisasterType, severity bands, DisasterRisk, summary
    readings   — typed factor readings + seeded synthesis
    assessors  — the ten evaluators and their action ladders
    engine     — concurrent aggregate assessment
"""
