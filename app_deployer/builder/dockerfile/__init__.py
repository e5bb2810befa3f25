"""Dockerfile templates, generation and optimisation advice."""