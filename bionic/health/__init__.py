"""Import of Apple Health data exports."""