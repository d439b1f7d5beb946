# Jobs module
