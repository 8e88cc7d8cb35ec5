#!/usr/bin/env python3
"""
Main entry point for the EcoWatch sync client
"""
from ecowatch.main import main

if __name__ == "__main__":
    main()
