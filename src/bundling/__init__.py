"""Zip bundling of module sources and resources."""
