"""inkturn: play a compiled ink story one GlkOte turn per process invocation."""
