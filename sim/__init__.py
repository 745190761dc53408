"""
sim: simulation core
====================

Modules
-------
params
    :class:`SimParams` frozen parameter set and its file loader.
physics
    Drone integrator (semi-implicit Euler, world bounds, reset edge).
repulsion
    Potential-field corrective forces from walls and obstacles.
collision
    Swept segment-vs-disc target hits and respawn.
world
    :class:`WorldState` blackboard and read-only :class:`WorldSnapshot`.
coordinator
    :class:`Coordinator` fixed-rate multiplexed event loop.
generators
    Obstacle / target batch producers.
cancel
    :class:`CancellationToken` and signal wiring.
interfaces
    Renderer / notifier protocols and their headless implementations.
"""
