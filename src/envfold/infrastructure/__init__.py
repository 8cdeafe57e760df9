"""Infrastructure layer: the only code that touches the real process environment.

Everything downstream receives an explicit EnvironmentSnapshot.
"""
