"""Strategies for building container images, with a Docker Engine strategy."""