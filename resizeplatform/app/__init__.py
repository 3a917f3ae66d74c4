"""Smart resize, platform constraint checking and batch orchestration."""
