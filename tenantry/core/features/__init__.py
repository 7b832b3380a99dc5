# (c) Copyright Datacraft, 2026
