#!/usr/bin/env python3
"""Resource group template deployment tools: CLI entrypoint."""

from rgdeploy.rgdeploy import main

if __name__ == "__main__":
    main()
