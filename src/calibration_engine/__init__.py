"""Calibration Engine — fit strain constants to reference ratings.

Sub-package containing:
    dataset    – chart file loading and validation
    evaluator  – scoring computed ratings vs reference ratings
    trainer    – coordinate-descent constant calibration
"""
