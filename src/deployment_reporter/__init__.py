"""Deployment reporting for build/release pipelines.

The `reports` subpackage records what a build session installed or deployed
and renders it as a stable, diffable JSON document.
"""
