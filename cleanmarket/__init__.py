"""Cleaning marketplace backend - review reciprocity and publication"""
