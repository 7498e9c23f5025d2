"""API models"""
