"""Command-line interface for recuscan.

Usage:
    recuscan extract receipt.txt
    recuscan extract receipt.json --json --meta
    cat receipt.txt | recuscan extract - --locale fr_CA --draft
    recuscan categories
"""
