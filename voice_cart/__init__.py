"""
                Voice Cart Service

Session cart backend for AI voice agents taking restaurant phone orders:
menu lookup, modifier resolution, spoken cart summaries and payment links,
with the hybrid Mock/Real service architecture.

Author: Khalil_Bannouri
Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Khalil_Bannouri"
