"""Human and machine renderings of command results."""
