"""Outbound notification channels"""
