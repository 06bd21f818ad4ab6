"""
Fixed dataset used instead of the live government feed in environments
without feed access. Shaped exactly like feed payloads.
"""

MOCK_FLOODS = [
    {
        "title": "Kelaniya River High Risk",
        "description": "Rapidly rising water level near Peliyagoda.",
        "severity": "high",
        "location": {"lat": 6.9639, "lng": 79.9018},
        "status": "active",
    },
    {
        "title": "Kaduwela Minor Flooding",
        "description": "Localized street flooding reported.",
        "severity": "low",
        "location": {"lat": 6.9319, "lng": 79.9730},
        "status": "active",
    },
    {
        "title": "Gampaha Medium Flooding",
        "description": "Waterlogged areas across town.",
        "severity": "medium",
        "location": {"lat": 7.0917, "lng": 79.9994},
        "status": "active",
    },
]

MOCK_SHELTERS = [
    {
        "name": "Colombo District Community Hall",
        "capacity": 300,
        "facilities": "Food, water, first aid",
        "contact": "+94 11 123 4567",
        "location": {"lat": 6.9271, "lng": 79.8612},
        "status": "available",
    },
    {
        "name": "Gampaha School Hall",
        "capacity": 200,
        "facilities": "Beds, sanitation, medicine",
        "contact": "+94 33 987 6543",
        "location": {"lat": 7.0900, "lng": 79.9900},
        "status": "available",
    },
]
