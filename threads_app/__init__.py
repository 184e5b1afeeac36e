"""Threads: short posts, replies, communities and reply activity over MongoDB."""
