# SPDX-FileCopyrightText: 2025-present DouglasMacKrell <d.mackrell@gmail.com>
#
# SPDX-License-Identifier: MIT

"""AniMatch - anime title match resolver."""

from animatch.__about__ import __version__

__all__ = ["__version__"]
