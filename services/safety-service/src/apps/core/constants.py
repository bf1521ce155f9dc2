# services/safety-service/src/apps/core/constants.py
"""
Drill reference data used when a drill type carries no defaults of its own.
"""

DEFAULT_OBJECTIVES = {
    'Fire Drill': [
        'All crew muster at assigned stations within 5 minutes',
        'Fire team deploys with correct PPE',
        'Fire boundary established and maintained',
        'Communication maintained throughout drill',
        'Fire equipment operated correctly',
    ],
    'Abandon Ship Drill': [
        'All crew muster at lifeboat stations within required time',
        'Correct donning of lifejackets demonstrated',
        'Lifeboat equipment checked and operational',
        'Launch procedures understood by all crew',
        'Head count completed accurately',
    ],
    'Man Overboard Drill': [
        'MOB alarm raised immediately',
        'Williamson turn or other recovery maneuver executed correctly',
        'MOB marker deployed',
        'Rescue boat prepared for launch',
        'MOB dummy recovered within acceptable time',
    ],
    'Collision Drill': [
        'Watertight doors closed immediately',
        'Damage assessment conducted',
        'Emergency steering tested',
        'Communication with bridge maintained',
        'Collision mat/emergency equipment prepared',
    ],
    'Pollution Response Drill': [
        'SOPEP equipment deployed correctly',
        'Oil spill containment procedures followed',
        'Reporting chain activated',
        'Shore notification simulated',
        'Cleanup equipment used correctly',
    ],
}

DEFAULT_EQUIPMENT = {
    'Fire Drill': [
        'Fire extinguishers',
        'SCBA (Self-Contained Breathing Apparatus)',
        'Fire hoses',
        'Fire blankets',
        'Fireman outfit',
        'Emergency fire pump',
    ],
    'Abandon Ship Drill': [
        'Lifeboats',
        'Life rafts',
        'EPIRB',
        'SART',
        'Lifejackets',
        'Immersion suits',
        'Pyrotechnics',
    ],
    'Man Overboard Drill': [
        'Life rings',
        'MOB marker/pole',
        'Rescue boat',
        'Throwing lines',
        'MOB recovery system',
    ],
    'Pollution Response Drill': [
        'Oil booms',
        'Absorbent materials',
        'Portable pumps',
        'PPE for oil response',
        'SOPEP equipment',
    ],
}
