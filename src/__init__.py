"""
EVChargingSimulator - Main Package
==================================

Tools for simulating how an electric-vehicle battery pack charges.

This package provides modules for:
- Charging Simulation (charge_simulator): cell-level pack model, charging
  current limits, balancing and the virtual-time driver

Author: EVChargingSimulator Team
License: See LICENSE file in project root
"""

__version__ = "0.1.0"
__author__ = "EVChargingSimulator Team"
