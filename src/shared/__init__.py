"""
Shared Kernel Module
====================

Shared infrastructure used by the SLA insights bounded context.

Architecture Pattern: Modular Monolith
- Each module (sla_insights) is a bounded context
- Shared kernel contains only generic infrastructure

DO NOT add SLA business rules to the shared kernel.
"""

__version__ = "1.0.0"
