"""
jailwatch: turns fail2ban, nginx and host report output into a stable,
versioned JSON contract that degrades to partial data instead of failing.
"""

__version__ = "1.0.0"
