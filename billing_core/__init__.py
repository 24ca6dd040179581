"""Subscription lifecycle and usage governance core"""
