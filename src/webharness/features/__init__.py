# This file makes webharness.features a Python package.
