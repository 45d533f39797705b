"""
preparedness.py — Static preparedness checklists per hazard category.

Independent of the simulator: the list depends only on the hazard and the
severity tier.  Catalogued hazards carry five base actions, everything
else gets the four generic ones, and High/Severe tiers append an
evacuation order.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import List, Mapping, Tuple, Union

from resilience_engine.scenarios.simulator import SeverityTier
from resilience_engine.signals import HazardCategory

EVACUATION_ORDER = "Follow evacuation orders from local authorities immediately"

GENERIC_ACTIONS: Tuple[str, ...] = (
    "Monitor situation closely",
    "Follow official instructions",
    "Prepare emergency supplies",
    "Stay informed via weather radio",
)

PREPAREDNESS_ACTIONS: Mapping[HazardCategory, Tuple[str, ...]] = MappingProxyType({
    HazardCategory.FLOODS: (
        "Evacuate low-lying areas and basements",
        "Move valuables to upper floors",
        "Turn off utilities if instructed",
        "Avoid walking/driving through flood water",
        "Monitor weather alerts continuously",
    ),
    HazardCategory.WILDFIRES: (
        "Create defensible space around buildings",
        "Prepare evacuation bags (go-bags)",
        "Close all windows and doors",
        "Wet down roofs if time permits",
        "Follow evacuation orders immediately",
    ),
    HazardCategory.EARTHQUAKES: (
        "Drop, Cover, and Hold On",
        "Stay away from windows and heavy objects",
        "Check for gas leaks after shaking stops",
        "Inspect building for structural damage",
        "Prepare for aftershocks",
    ),
    HazardCategory.SEVERE_STORMS: (
        "Secure outdoor objects",
        "Stay indoors away from windows",
        "Charge all devices",
        "Fill bathtubs with water",
        "Identify shelter location (interior room)",
    ),
    HazardCategory.TEMPERATURE_EXTREMES: (
        "Stay in air-conditioned spaces",
        "Drink plenty of water",
        "Check on vulnerable neighbors",
        "Limit outdoor activities",
        "Never leave children/pets in vehicles",
    ),
    HazardCategory.DROUGHT: (
        "Implement water conservation measures",
        "Reduce landscape watering",
        "Fix leaks immediately",
        "Avoid fire-prone activities",
        "Monitor water supply levels",
    ),
    HazardCategory.LANDSLIDES: (
        "Evacuate if ground movement detected",
        "Stay alert during heavy rainfall",
        "Report ground cracks to authorities",
        "Avoid affected roads",
        "Listen for unusual sounds (debris flow)",
    ),
})


def get_preparedness_actions(
    hazard_type: Union[HazardCategory, str],
    severity: Union[SeverityTier, str],
) -> List[str]:
    """
    Preparedness checklist for a hazard at a severity tier.

    >>> get_preparedness_actions("Volcanoes", "Low")
    ['Monitor situation closely', 'Follow official instructions', 'Prepare emergency supplies', 'Stay informed via weather radio']
    >>> get_preparedness_actions("Floods", "Severe")[-1]
    'Follow evacuation orders from local authorities immediately'
    """
    tier = SeverityTier.parse(severity)
    actions = list(PREPAREDNESS_ACTIONS.get(HazardCategory.parse(hazard_type), GENERIC_ACTIONS))
    if tier.needs_evacuation:
        actions.append(EVACUATION_ORDER)
    return actions
