"""Vortex bridge deployment harness.

Named account resolution across networks and Tenderly forks,
plus the scripts that deploy the Vortex bridges with them.
"""
