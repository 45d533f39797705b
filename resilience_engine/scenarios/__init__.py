"""
Scenario simulation.

    aspects.py       per-hazard aspect catalogue (what a timeline reports)
    simulator.py     intensity curve, hourly timeline and peak summary
    preparedness.py  static preparedness checklists
"""
