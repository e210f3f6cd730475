#!/usr/bin/env python3
"""
CLI for TreeShop Ops.

Usage:
    python cli.py quote --acres 2.5 --tier medium
    python cli.py rates show
    python cli.py rates set-base 2600
    python cli.py equipment-cost --purchase-price 65000 --years 7 --daily-fuel 150
    python cli.py serve --port 8000

Commands:
    quote           Calculate a quote from the saved rate table
    rates           Show or edit package rates
    equipment-cost  Hourly cost and recommended rate for a machine
    serve           Start the API server
"""
from treeshop.cli import cli


if __name__ == '__main__':
    cli()
