"""Deployment agent service: eventer, configurers, installer, notifier and deployer."""
