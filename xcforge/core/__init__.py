# SPDX-License-Identifier: MIT
"""Package graph, options and errors shared by all of xcforge."""
