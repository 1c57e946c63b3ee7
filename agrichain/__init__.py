"""
AgriChain: Supply-Chain Traceability for EUDR-Regulated Commodities
===================================================================

The ``eudr_compliance`` subpackage holds the compliance engine: geolocation
normalization and validation, content hashing, risk assessment and due
diligence statement assembly.
"""

__version__ = "1.0.0"

__author__ = "AgriChain Team"
__license__ = "MIT"
