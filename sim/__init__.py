"""
sim — Simulation core
=====================

Modules
-------
world
    :class:`World` tick order, accessors and JSON export.
vehicle
    :class:`Vehicle` kinematics, car following and lifecycle.
paths
    Straight and Bézier turning paths built at spawn time.
sensors
    :class:`SensorArray` detection zones feeding the adaptive controller.
signals
    Fixed-timer and adaptive-priority controllers plus mode dispatch.
fleet
    :class:`FleetManager` spawning / removal and :class:`Stats`.
settings
    :class:`SimulationSettings` runtime knobs.
traffic_policy
    :class:`TrafficPolicy` engine constants and scoring helpers.
sim_bridge
    :class:`SimBridge` background-thread driver.
physics
    Low-level geometry and distance helpers.
types
    Enumerations and small value types.
"""
