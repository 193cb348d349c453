#!/usr/bin/env python3
"""Launch the ProxMenux installer.

Usage:
    sudo python3 run.py
"""
from proxmenux_installer.main import main

if __name__ == "__main__":
    main()
