"""Job runners: read records, partition them, drive one writer per partition."""
