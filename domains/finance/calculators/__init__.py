"""
Finance Calculators — Local deterministic math functions.

Each calculator is a plain function: (validated input model) → dict.
The vector store lookup is the one async tool; it is bound to a retriever
at registration time.
"""

from domains.finance.calculators.business import register_business_calculators
from domains.finance.calculators.concentration import register_concentration_calculators
from domains.finance.calculators.growth import register_growth_calculators
from domains.finance.calculators.retrieval import register_retrieval_tools

__all__ = [
    "register_business_calculators",
    "register_concentration_calculators",
    "register_growth_calculators",
    "register_retrieval_tools",
]
