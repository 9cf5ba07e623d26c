"""
Core package: configuration model, transition resolution, the state machine
engine and the configuration composer.
"""
