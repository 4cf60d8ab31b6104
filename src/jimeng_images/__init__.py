"""Jimeng image-generation orchestration service.

Provides:
- geometry resolution and ability-graph construction for Jimeng drafts
- job submission, status polling and credit-aware resolution fallback
- a FastAPI surface for image generation and token inspection
"""
