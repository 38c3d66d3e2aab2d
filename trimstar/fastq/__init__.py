"""Preparation of raw fastq reads ahead of alignment.
"""
